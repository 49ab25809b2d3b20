from __future__ import annotations

from pathlib import Path

WORKSPACE_MARKER = "Anchor.toml"
IDL_DIR = Path("target") / "idl"


def find_workspace_root(start: Path) -> Path:
    """Closest directory at or above ``start`` holding Anchor.toml, else ``start``."""
    start = start.resolve()
    for candidate in (start, *start.parents):
        if (candidate / WORKSPACE_MARKER).is_file():
            return candidate
    return start


def normalize_program_name(name: str) -> str:
    # anchor writes target/idl/<crate_name>.json with dashes turned into underscores
    return name.strip().replace("-", "_")


def discover_idl_path(start: Path, program_name: str | None = None) -> Path:
    """Locate the built IDL of a program inside an Anchor workspace.

    With ``program_name`` the lookup is ``target/idl/<program_name>.json``.
    Without it, a lone IDL in ``target/idl`` wins; otherwise the IDL named
    after the starting directory is used (running from ``programs/<name>``).
    """
    root = find_workspace_root(start)
    idl_dir = root / IDL_DIR

    if program_name:
        candidate = idl_dir / f"{normalize_program_name(program_name)}.json"
        if candidate.is_file():
            return candidate
        msg = f"No IDL for program {program_name!r} in {idl_dir}. Run `anchor build` first."
        raise FileNotFoundError(msg)

    found = sorted(idl_dir.glob("*.json")) if idl_dir.is_dir() else []
    if len(found) == 1:
        return found[0]
    candidate = idl_dir / f"{normalize_program_name(start.resolve().name)}.json"
    if candidate.is_file():
        return candidate
    if found:
        names = ", ".join(path.stem for path in found)
        msg = f"Several programs found in {idl_dir} ({names}); pass a program name."
    else:
        msg = f"No IDL found in {idl_dir}. Run `anchor build` or pass an IDL path."
    raise FileNotFoundError(msg)
