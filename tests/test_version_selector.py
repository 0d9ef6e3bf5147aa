"""Tests for compiler build selection."""

import pytest

from src.solidity.models import CompilationJobCreationError, CompilerBuild, ResolvedFile, SolcConfig
from src.solidity.version_selector import accepts, satisfies, select_for_root

DEFAULT_SETTINGS = {"optimizer": {"enabled": False, "runs": 200}}
OPTIMIZED_SETTINGS = {"optimizer": {"enabled": True, "runs": 200}}

SOLC_055 = CompilerBuild("0.5.5", DEFAULT_SETTINGS)
SOLC_066 = CompilerBuild("0.6.6", DEFAULT_SETTINGS)


class TestSatisfies:
    """Tests for the npm-style range predicate."""

    @pytest.mark.parametrize("version,range_str,expected", [
        ("0.5.5", "^0.5.0", True),
        ("0.6.6", "^0.5.0", False),
        ("0.6.6", ">=0.5.0", True),
        ("0.4.26", ">=0.4.22 <0.6.0", True),
        ("0.6.0", ">=0.4.22 <0.6.0", False),
        ("0.5.5", "0.5.5", True),
        ("0.5.4", "0.5.5", False),
        ("0.5.5", ">= 0.5.0", True),
        ("0.5.5", "= 0.5.5", True),
        ("0.5.4", ">= 0.5.5", False),
        ("0.4.26", ">= 0.4.22 < 0.6.0", True),
        ("0.6.0", ">= 0.4.22 < 0.6.0", False),
        ("0.5.5", "^ 0.5.0", True),
    ])
    def test_ranges(self, version, range_str, expected):
        assert satisfies(version, range_str) is expected

    def test_invalid_range_never_matches(self):
        assert satisfies("0.5.5", "not a range !!") is False

    def test_invalid_version_never_matches(self):
        assert satisfies("latest", "^0.5.0") is False


class TestAccepts:
    """Tests for dependency acceptance."""

    def test_all_pragmas_must_match(self):
        file = ResolvedFile("Foo", ("^0.5.0", ">=0.5.3"))
        assert accepts(file, SOLC_055)
        assert not accepts(ResolvedFile("Bar", ("^0.5.0", "<0.5.3")), SOLC_055)

    def test_file_without_pragmas_accepts_anything(self):
        assert accepts(ResolvedFile("Foo"), SOLC_066)

    def test_overrides_are_ignored(self):
        """Acceptance only looks at the file's own pragmas."""
        file = ResolvedFile("Foo", ("^0.6.0",))
        assert not accepts(file, SOLC_055)


class TestSelectForRoot:
    """Tests for root compiler selection."""

    def test_single_compatible_compiler(self):
        build, error = select_for_root(ResolvedFile("Foo", ("^0.5.0",)), SolcConfig((SOLC_055,)))
        assert error is None
        assert build == SOLC_055

    def test_newest_compiler_wins(self):
        config = SolcConfig((SOLC_055, SOLC_066))
        build, error = select_for_root(ResolvedFile("Foo", (">=0.5.0",)), config)
        assert error is None
        assert build.version == "0.6.6"

    def test_newest_wins_regardless_of_list_order(self):
        config = SolcConfig((SOLC_066, SOLC_055))
        build, _ = select_for_root(ResolvedFile("Foo", (">=0.5.0",)), config)
        assert build.version == "0.6.6"

    def test_equal_versions_prefer_latest_position(self):
        optimized = CompilerBuild("0.5.5", OPTIMIZED_SETTINGS)
        config = SolcConfig((SOLC_055, optimized))
        build, _ = select_for_root(ResolvedFile("Foo", ("^0.5.0",)), config)
        assert build == optimized
        assert build.optimizer_enabled

    def test_no_compatible_compiler(self):
        build, error = select_for_root(ResolvedFile("Foo", ("^0.6.0",)), SolcConfig((SOLC_055,)))
        assert build is None
        assert error == CompilationJobCreationError.NON_COMPILABLE

    def test_empty_compiler_list(self):
        _, error = select_for_root(ResolvedFile("Foo", ("^0.5.0",)), SolcConfig())
        assert error == CompilationJobCreationError.NON_COMPILABLE

    def test_override_takes_precedence(self):
        config = SolcConfig((SOLC_066,), overrides={"Foo": SOLC_055})
        build, error = select_for_root(ResolvedFile("Foo", (">=0.5.0",)), config)
        assert error is None
        assert build == SOLC_055

    def test_override_not_in_compiler_list_is_used_verbatim(self):
        custom = CompilerBuild("0.5.1", OPTIMIZED_SETTINGS)
        config = SolcConfig((SOLC_055,), overrides={"Foo": custom})
        build, _ = select_for_root(ResolvedFile("Foo", ("^0.5.0",)), config)
        assert build == custom

    def test_invalid_override(self):
        config = SolcConfig((SOLC_055,), overrides={"Foo": SOLC_066})
        build, error = select_for_root(ResolvedFile("Foo", ("^0.5.0",)), config)
        assert build is None
        assert error == CompilationJobCreationError.NON_COMPILABLE_OVERRIDEN

    def test_invalid_override_does_not_fall_back_to_compiler_list(self):
        """A compatible general compiler does not rescue a bad override."""
        config = SolcConfig((SOLC_055, SOLC_066), overrides={"Foo": SOLC_066})
        _, error = select_for_root(ResolvedFile("Foo", ("^0.5.0",)), config)
        assert error == CompilationJobCreationError.NON_COMPILABLE_OVERRIDEN

    def test_override_for_other_file_is_ignored(self):
        config = SolcConfig((SOLC_055,), overrides={"Bar": SOLC_066})
        build, _ = select_for_root(ResolvedFile("Foo", ("^0.5.0",)), config)
        assert build == SOLC_055
