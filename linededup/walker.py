from __future__ import annotations

import fnmatch
import os
import typing as t
from pathlib import Path

import pathspec

from linededup.utils import get_logger

logger = get_logger(__name__)

# Later files win on conflicting rules, so .ignore overrides .gitignore.
GIT_IGNORE_FILE = ".gitignore"
IGNORE_FILE = ".ignore"

_Rules = t.List[t.Tuple[Path, pathspec.PathSpec]]


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def is_ignored(rel_path: str, patterns: t.Sequence[str]) -> bool:
    """True when any glob matches the base name or the root-relative POSIX path."""
    name = rel_path.rsplit("/", 1)[-1]
    for pat in patterns:
        pat = pat.rstrip("/")
        if not pat:
            continue
        if fnmatch.fnmatchcase(name, pat) or fnmatch.fnmatchcase(rel_path, pat):
            return True
    return False


def _in_git_repo(root: Path) -> bool:
    for d in (root, *root.resolve().parents):
        if (d / ".git").exists():
            return True
    return False


def load_ignore_rules(directory: Path, *, use_gitignore: bool) -> t.Optional[pathspec.PathSpec]:
    """Parse the gitignore-style rule files kept in ``directory``."""
    names = [GIT_IGNORE_FILE, IGNORE_FILE] if use_gitignore else [IGNORE_FILE]
    lines: t.List[str] = []
    for name in names:
        try:
            lines.extend((directory / name).read_text(encoding="utf-8", errors="replace").splitlines())
        except OSError:
            continue
    if not lines:
        return None
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def rules_exclude(path: Path, is_dir: bool, rules: _Rules) -> bool:
    """Apply rule files from the deepest directory outwards; the first verdict wins.

    A ``!pattern`` in a nested rule file re-includes what a parent excluded.
    """
    for base, spec in reversed(rules):
        rel = path.relative_to(base).as_posix()
        if is_dir:
            rel += "/"
        verdict = None
        for pattern in spec.patterns:
            if pattern.include is None:
                continue
            if pattern.match_file(rel) is not None:
                verdict = pattern.include
        if verdict is not None:
            return verdict
    return False


def iter_files(
    root: Path,
    ignore: t.Sequence[str] = (),
    *,
    include_hidden: bool = True,
    use_ignore_files: bool = True,
) -> t.Iterator[Path]:
    """Yield regular files under ``root`` in sorted, depth-first order.

    Directories matching an ignore glob are not descended into. With
    ``use_ignore_files``, ``.ignore`` files are honored everywhere and
    ``.gitignore`` files when ``root`` lies inside a git work tree. Symlinks
    are neither followed nor yielded. Entries that cannot be listed or
    stat'ed are skipped.
    """
    root = Path(root)
    use_gitignore = use_ignore_files and _in_git_repo(root)
    inherited: t.Dict[str, _Rules] = {}

    def _onerror(err: OSError) -> None:
        logger.debug("walk.skip path=%s error=%s", getattr(err, "filename", None), err)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_onerror):
        here = Path(dirpath)
        rel_dir = here.relative_to(root).as_posix()
        prefix = "" if rel_dir == "." else rel_dir + "/"

        rules = list(inherited.pop(dirpath, []))
        if use_ignore_files:
            spec = load_ignore_rules(here, use_gitignore=use_gitignore)
            if spec is not None:
                rules.append((here, spec))

        kept = []
        for d in sorted(dirnames):
            if not include_hidden and _is_hidden(d):
                continue
            if is_ignored(prefix + d, ignore):
                continue
            if rules and rules_exclude(here / d, True, rules):
                continue
            kept.append(d)
            inherited[os.path.join(dirpath, d)] = rules
        dirnames[:] = kept

        for name in sorted(filenames):
            if not include_hidden and _is_hidden(name):
                continue
            if is_ignored(prefix + name, ignore):
                continue
            path = here / name
            if rules and rules_exclude(path, False, rules):
                continue
            try:
                if path.is_symlink() or not path.is_file():
                    continue
            except OSError as e:
                logger.debug("walk.skip path=%s error=%s", path, e)
                continue
            yield path
