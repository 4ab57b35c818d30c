"""
Import-boundary enforcement for the fundbook layers.

Dependency direction::

    fundbook_kernel  <-  fundbook_engines  <-  fundbook_modules
    fundbook_kernel  <-  fundbook_config   <-  fundbook_modules

1. Kernel purity    -- fundbook_kernel/** imports only itself and stdlib.
2. Engine purity    -- fundbook_engines/** may not import config or modules.
3. Config isolation -- fundbook_config/** may not import engines or modules.
4. No clock         -- kernel and engines never read the wall clock or the
                       environment; dates always arrive as arguments.
5. No persistence   -- no package imports a database driver or ORM.

All scanning is done via AST -- these tests are read-only.
"""

import ast
from pathlib import Path

from fundbook_kernel.invariants import (
    ALL_CORE_INVARIANTS,
    FORBIDDEN_KERNEL_IMPORTS,
    CoreInvariant,
)

ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[Path]:
    return sorted((ROOT / package).rglob("*.py"))


def _extract_imports(path: Path) -> list[tuple[int, str]]:
    tree = ast.parse(path.read_text(), filename=str(path))
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _extract_attribute_calls(path: Path) -> list[tuple[int, str]]:
    tree = ast.parse(path.read_text(), filename=str(path))
    return [
        (node.lineno, f"{node.value.id}.{node.attr}")
        for node in ast.walk(tree)
        if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name)
    ]


def _matches_any(module: str, prefixes: tuple[str, ...]) -> bool:
    return any(module == p or module.startswith(f"{p}.") for p in prefixes)


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    found = []
    for path in _python_files(package):
        for lineno, module in _extract_imports(path):
            if _matches_any(module, forbidden):
                found.append(f"{path.relative_to(ROOT)}:{lineno} imports {module}")
    return found


class TestPackagesPresent:

    def test_every_layer_has_sources(self):
        for package in ("fundbook_kernel", "fundbook_engines", "fundbook_config", "fundbook_modules"):
            assert _python_files(package), f"{package} has no python files"


class TestKernelPurity:

    FORBIDDEN = FORBIDDEN_KERNEL_IMPORTS + ("yaml",)

    def test_kernel_imports_only_itself(self):
        assert _violations("fundbook_kernel", self.FORBIDDEN) == []


class TestCoreInvariantsDeclaration:
    """The invariants contract is declared and complete."""

    def test_required_invariants_declared(self):
        required = {
            "DOUBLE_ENTRY_BALANCE",
            "SINGLE_SIDED_LINES",
            "MATCH_UNIQUENESS",
            "BUDGET_ARITHMETIC",
            "PROJECT_RATE_TOTAL",
            "INPUT_IMMUTABILITY",
        }
        assert required <= {inv.name for inv in CoreInvariant}
        assert ALL_CORE_INVARIANTS == frozenset(CoreInvariant)

    def test_forbidden_kernel_imports_cover_upper_layers(self):
        assert set(FORBIDDEN_KERNEL_IMPORTS) == {"fundbook_engines", "fundbook_modules", "fundbook_config"}


class TestEnginePurity:

    FORBIDDEN = ("fundbook_config", "fundbook_modules", "yaml")

    def test_engines_import_only_kernel(self):
        assert _violations("fundbook_engines", self.FORBIDDEN) == []


class TestConfigIsolation:

    FORBIDDEN = ("fundbook_engines", "fundbook_modules")

    def test_config_imports_only_kernel(self):
        assert _violations("fundbook_config", self.FORBIDDEN) == []


class TestNoClock:

    FORBIDDEN_CALLS = frozenset(
        {
            "datetime.now",
            "datetime.utcnow",
            "datetime.today",
            "date.today",
            "time.time",
            "os.environ",
            "os.getenv",
        }
    )

    def test_kernel_and_engines_take_dates_as_arguments(self):
        found = []
        for package in ("fundbook_kernel", "fundbook_engines"):
            for path in _python_files(package):
                for lineno, call in _extract_attribute_calls(path):
                    if call in self.FORBIDDEN_CALLS:
                        found.append(f"{path.relative_to(ROOT)}:{lineno} uses {call}")
        assert found == []


class TestNoPersistence:

    FORBIDDEN = ("sqlalchemy", "psycopg2", "psycopg", "sqlite3")

    def test_no_database_imports(self):
        found = []
        for package in ("fundbook_kernel", "fundbook_engines", "fundbook_config", "fundbook_modules"):
            found.extend(_violations(package, self.FORBIDDEN))
        assert found == []
