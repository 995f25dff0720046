"""
Task Module Loader
==================
Discover handler-registration modules under a tasks directory and let each one
register its handlers against an explicit registry handle.

Discovery is deterministic:
- If <tasks_dir>/manifest.json exists, its order is respected.
- Otherwise *.py files are found recursively and ordered by numeric prefix
  (01_setup.py, 02_build.py), then by relative path.

Each module must define a module-level ``register(registry, logger)``.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import hashlib
import importlib.util
import json
import os
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import List, Union

from loguru import logger

from taskchain.config import LOADER
from taskchain.engine.errors import TaskModuleError
from taskchain.engine.registry import TaskRegistry
from taskchain.utils.schema_validation import validate_task_manifest


_MODULE_PREFIX_RE = re.compile(r"^(?P<prefix>\d{1,4})[-_].+")


def _safe_relpath(child: Path, base: Path) -> str:
    return str(child.relative_to(base)).replace(os.sep, "/")


def _module_order_key(relpath: str) -> tuple:
    """Deterministic ordering key for task modules.

    Numerically prefixed modules come first in prefix order; the rest follow
    sorted by path.
    """
    name = Path(relpath).name
    m = _MODULE_PREFIX_RE.match(name)
    if m:
        return (0, int(m.group("prefix")), relpath)
    return (1, 10**9, relpath)


def _resolve_tasks_dir(tasks_dir: Union[str, Path]) -> Path:
    path = Path(tasks_dir).expanduser().resolve()
    if not path.exists():
        raise FileNotFoundError(f"Tasks directory not found: {path}")
    if not path.is_dir():
        raise NotADirectoryError(f"Tasks path is not a directory: {path}")
    return path


def _read_manifest(tasks_dir: Path, manifest_path: Path) -> List[str]:
    try:
        payload = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValueError(f"Invalid task manifest JSON: {type(e).__name__}")

    validate_task_manifest(payload)
    if isinstance(payload, dict):
        payload = payload["modules"]

    modules: List[str] = []
    for entry in payload:
        rel = entry.strip().lstrip("/")
        mp = (tasks_dir / rel).resolve()
        try:
            mp.relative_to(tasks_dir)
        except ValueError:
            raise ValueError(f"Manifest module must be under the tasks directory: {rel}")
        if not mp.is_file():
            raise FileNotFoundError(f"Manifest module not found: {rel}")
        modules.append(_safe_relpath(mp, tasks_dir))
    return modules


def discover_task_modules(tasks_dir: Union[str, Path]) -> List[str]:
    """Return task module relpaths (relative to tasks_dir) in load order."""
    root = _resolve_tasks_dir(tasks_dir)

    manifest_path = root / LOADER.MANIFEST_FILENAME
    if manifest_path.exists():
        return _read_manifest(root, manifest_path)

    max_modules = int(LOADER.MAX_MODULES)
    discovered: List[str] = []
    for p in root.rglob("*.py"):
        if not p.is_file():
            continue
        rel_parts = p.relative_to(root).parts
        if "__pycache__" in rel_parts:
            continue
        if any(part.startswith((".", "_")) for part in rel_parts):
            continue
        discovered.append(_safe_relpath(p, root))

    discovered.sort(key=_module_order_key)
    if len(discovered) > max_modules:
        logger.warning(
            f"Task module discovery kept the first {max_modules} of {len(discovered)} modules in {root}"
        )
        discovered = discovered[:max_modules]
    return discovered


def _module_name_for(tasks_dir: Path, relpath: str) -> str:
    digest = hashlib.sha256(str(tasks_dir).encode("utf-8")).hexdigest()[:12]
    stem = re.sub(r"[^0-9a-zA-Z_]", "_", relpath[:-3])
    return f"taskchain_tasks_{digest}_{stem}"


def import_task_module(tasks_dir: Path, relpath: str) -> ModuleType:
    """Import one task module from a file under tasks_dir."""
    path = tasks_dir / relpath
    module_name = _module_name_for(tasks_dir, relpath)

    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise TaskModuleError(relpath, "no import spec")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise TaskModuleError(relpath, f"{type(e).__name__}: {e}") from e
    return module


def load_task_modules(
    tasks_dir: Union[str, Path],
    registry: TaskRegistry,
    *,
    debug: bool = False,
) -> List[str]:
    """
    Load every discovered task module and call its register(registry, logger).

    Returns:
        Relpaths of the loaded modules, in load order.

    Raises:
        TaskModuleError: A module failed to import or has no callable register().
        TaskNotAllowedError: A module registered a name outside the allow-list.
    """
    root = _resolve_tasks_dir(tasks_dir)
    if debug:
        logger.debug(f"Register tasks dir {root}")

    loaded: List[str] = []
    for relpath in discover_task_modules(root):
        if debug:
            logger.debug(f"... load tasks file {relpath}")

        module = import_task_module(root, relpath)
        register = getattr(module, "register", None)
        if not callable(register):
            raise TaskModuleError(relpath, "module does not define register(registry, logger)")

        register(registry, logger)
        loaded.append(relpath)

    logger.info(f"Loaded {len(loaded)} task module(s) from {root}")
    return loaded
