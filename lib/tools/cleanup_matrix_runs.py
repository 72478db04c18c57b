"""
Clean up old full-matrix run directories while keeping the most recent ones.

Policy (deterministic):
- Only direct child directories of the output root are run directories.
- Keep the newest `--keep` of them (by newest file inside, not directory mtime).
- Stray files directly under the output root are left alone.

The runner itself never deletes artifacts; this is the housekeeping step.

Usage:
  python lib/tools/cleanup_matrix_runs.py
  python lib/tools/cleanup_matrix_runs.py --keep 3 --dry-run
  python lib/tools/cleanup_matrix_runs.py --out-root /tmp/full-matrix
"""

from __future__ import annotations

import argparse
import os
import shutil
from pathlib import Path


OUT_ROOT_PARTS = (".agent", "artifacts", "full-matrix")


def _effective_mtime(path: Path) -> float:
    try:
        m = path.stat().st_mtime
    except OSError:
        m = 0.0
    if not path.is_dir():
        return m

    # Directory mtime is not bumped when files inside are overwritten.
    for root, _dirs, files in os.walk(path):
        for f in files:
            p = Path(root) / f
            try:
                m = max(m, p.stat().st_mtime)
            except OSError:
                pass
    return m


def plan_cleanup(out_root: Path, keep: int) -> tuple[list[Path], list[Path]]:
    """Return (kept, removable) run directories, newest first."""
    if keep < 0:
        raise ValueError(f"keep must be >= 0, got {keep}")
    if not out_root.exists():
        return [], []
    runs = sorted(
        (p for p in out_root.iterdir() if p.is_dir()),
        key=lambda p: (_effective_mtime(p), p.name),
        reverse=True,
    )
    return runs[:keep], runs[keep:]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Delete old full-matrix runs, keeping only the most recent.")
    parser.add_argument("--out-root", type=Path, default=None)
    parser.add_argument("--keep", type=int, default=5)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args(argv)
    if args.out_root is None:
        env_root = os.environ.get("TONFERN_OUT_ROOT", "").strip()
        args.out_root = Path(env_root).expanduser() if env_root else Path.cwd().joinpath(*OUT_ROOT_PARTS)

    if not args.out_root.exists():
        print(f"OK: nothing to clean (missing {args.out_root})")
        return 0

    kept, removable = plan_cleanup(args.out_root, args.keep)

    removed: list[str] = []
    for p in removable:
        if args.dry_run:
            removed.append(p.name)
            continue
        try:
            shutil.rmtree(p)
        except OSError as e:
            raise SystemExit(f"Failed to remove {p}: {e}") from e
        removed.append(p.name)

    print("Kept:")
    for k in kept:
        print(f"  - {k.name}")
    print("Removed:" + (" (dry run)" if args.dry_run else ""))
    for r in sorted(removed):
        print(f"  - {r}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
