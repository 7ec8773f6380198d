"""
Layer boundaries.

Tests that enforce the package layering:

1. estate_kernel/** may NOT import estate_config, estate_ingestion or
   estate_services. The kernel never depends upward.

2. estate_kernel/domain/** is pure: no ORM, no store, no workbook reader.

3. estate_ingestion/** may NOT import estate_services, and estate_config
   may only depend on the kernel.

4. openpyxl is only imported by the xlsx adapter.

These tests read source code via AST. They cannot break anything.
"""

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _python_files(package: str) -> list[Path]:
    return sorted((ROOT / package).rglob("*.py"))


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Extract (line_number, module_string) for all imports in a file."""
    try:
        tree = ast.parse(filepath.read_text(encoding="utf-8"), filename=str(filepath))
    except (SyntaxError, UnicodeDecodeError):
        return []

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                results.append((node.lineno, node.module))
    return results


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for filepath in _python_files(package):
        for lineno, module in _extract_imports(filepath):
            for prefix in forbidden:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(f"  {filepath.relative_to(ROOT)}:{lineno} imports '{module}'")
    return found


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


def test_packages_exist():
    for package in ("estate_kernel", "estate_config", "estate_ingestion", "estate_services"):
        assert _python_files(package), f"{package} has no source files"


class TestKernelNoUpwardDependencies:
    FORBIDDEN_PREFIXES = ("estate_config", "estate_ingestion", "estate_services")

    def test_kernel_does_not_import_upward(self):
        violations = _violations("estate_kernel", self.FORBIDDEN_PREFIXES)
        assert not violations, (
            "Kernel boundary violation: estate_kernel/** must not import "
            "upward packages:\n" + "\n".join(violations)
        )


class TestKernelDomainPurity:
    FORBIDDEN_MODULES = (
        "sqlalchemy",
        "sqlite3",
        "openpyxl",
        "yaml",
        "estate_kernel.db",
        "estate_kernel.store",
    )

    def test_domain_no_io_imports(self):
        violations = _violations("estate_kernel/domain", self.FORBIDDEN_MODULES)
        assert not violations, (
            "Domain purity violation: estate_kernel/domain/** must not "
            "import storage or file-format packages:\n" + "\n".join(violations)
        )


class TestMiddleLayers:
    def test_ingestion_does_not_import_services(self):
        violations = _violations("estate_ingestion", ("estate_services",))
        assert not violations, "\n".join(violations)

    def test_config_depends_only_on_kernel(self):
        violations = _violations("estate_config", ("estate_ingestion", "estate_services"))
        assert not violations, "\n".join(violations)


def test_openpyxl_confined_to_xlsx_adapter():
    adapter = ROOT / "estate_ingestion" / "adapters" / "xlsx_adapter.py"
    offenders = []
    for package in ("estate_kernel", "estate_config", "estate_ingestion", "estate_services"):
        for filepath in _python_files(package):
            if filepath == adapter:
                continue
            if any(m == "openpyxl" or m.startswith("openpyxl.") for _, m in _extract_imports(filepath)):
                offenders.append(str(filepath.relative_to(ROOT)))
    assert not offenders, f"openpyxl imported outside the xlsx adapter: {offenders}"
