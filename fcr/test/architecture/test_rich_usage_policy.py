from __future__ import annotations

from ._utils import fcr_root, iter_python_files, matches_prefix, parse_imports


def test_direct_rich_imports_are_limited_to_approved_modules() -> None:
    root = fcr_root()
    allowlist = {"output/console.py"}

    offenders: list[str] = []
    for file_path in iter_python_files(root):
        rel = file_path.relative_to(root)
        for item in parse_imports(file_path):
            if not matches_prefix(item.module, "rich"):
                continue
            if str(rel) in allowlist:
                continue
            offenders.append(f"{rel}:{item.line}: direct rich import '{item.module}'")

    assert not offenders, "Direct rich usage policy violations:\n" + "\n".join(offenders)
