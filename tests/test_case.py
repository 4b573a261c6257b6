"""Tests for repolint.core.case: naming-convention checks and suggestions."""

from __future__ import annotations

import pytest

from repolint.core.case import case_name, is_hidden, suggest_case, validate_case


class TestValidateCase:
    @pytest.mark.parametrize(
        ("name", "style"),
        [
            ("my-file.ts", "kebab"),
            ("v2-api", "kebab"),
            ("button.test.ts", "kebab"),
            ("my_file.py", "snake"),
            ("myFile", "camel"),
            ("useAuth.ts", "camel"),
            ("MyFile.tsx", "pascal"),
            ("Button.test.tsx", "pascal"),
        ],
    )
    def test_valid_names(self, name: str, style: str) -> None:
        assert validate_case(name, style)

    @pytest.mark.parametrize(
        ("name", "style"),
        [
            ("myFile.ts", "kebab"),
            ("my_file.ts", "kebab"),
            ("my-file.py", "snake"),
            ("MyFile", "camel"),
            ("myFile", "pascal"),
            ("my-file", "pascal"),
        ],
    )
    def test_invalid_names(self, name: str, style: str) -> None:
        assert not validate_case(name, style)

    def test_hidden_names_always_pass(self) -> None:
        assert is_hidden(".eslintrc")
        assert validate_case(".eslintrc", "kebab")
        assert validate_case(".Weird_Name", "pascal")

    def test_any_and_unknown_styles_pass(self) -> None:
        assert validate_case("Whatever_Name", "any")
        assert validate_case("Whatever_Name", "weird")


class TestSuggestCase:
    def test_pascal_to_kebab(self) -> None:
        assert suggest_case("MyComponent.tsx", "kebab") == "my-component.tsx"

    def test_kebab_to_camel(self) -> None:
        assert suggest_case("my-hook.ts", "camel") == "myHook.ts"

    def test_snake_to_pascal_without_extension(self) -> None:
        assert suggest_case("user_profile", "pascal") == "UserProfile"

    def test_camel_to_snake(self) -> None:
        assert suggest_case("myFile.ts", "snake") == "my_file.ts"

    def test_unknown_style_returns_name(self) -> None:
        assert suggest_case("Some_Name", "any") == "Some_Name"


class TestCaseName:
    def test_known_styles(self) -> None:
        assert case_name("kebab") == "kebab-case"
        assert case_name("snake") == "snake_case"
        assert case_name("camel") == "camelCase"
        assert case_name("pascal") == "PascalCase"

    def test_unknown_style_echoed(self) -> None:
        assert case_name("weird") == "weird"
