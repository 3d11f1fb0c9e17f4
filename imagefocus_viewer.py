"""imagefocus viewer - open an HTML page with click-to-focus images.

Usage:
    imagefocus-viewer page.html [#if_slide_N] [-v | -vv]
    imagefocus-viewer page.html#if_slide_N
"""
from __future__ import annotations
import os
import sys
import traceback
from typing import List, Optional, Tuple

from imagefocus.app import Application
from imagefocus.logging import log, set_level


def parse_args(argv: List[str]) -> Tuple[Optional[str], str, int]:
    """Split arguments into (page path, fragment, log level)."""
    page_path = None
    fragment = ""
    level = 1
    for a in argv:
        if a in ("-v", "-vv"):
            level = len(a)
        elif a.startswith("#"):
            fragment = a
        elif page_path is None:
            path, sep, frag = a.partition("#")
            page_path = os.path.abspath(path)
            if sep:
                fragment = sep + frag
    return page_path, fragment, level


def main() -> int:
    page_path, fragment, level = parse_args(sys.argv[1:])
    set_level(level)
    log("[MAIN] Starting viewer")

    if not page_path or not os.path.isfile(page_path):
        log(f"[ARGS] No readable page given: {page_path!r}")
        sys.stderr.write(__doc__)
        return 2
    log(f"[ARGS] Page {page_path} fragment {fragment!r}")

    app = Application()
    try:
        if not app.initialize(page_path, fragment):
            return 1
    except Exception as e:
        log(f"[INIT][CRITICAL] Failed to initialize: {e!r}")
        log(f"[INIT][CRITICAL] Traceback:\n{traceback.format_exc()}")
        return 1
    app.run()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        log(f"[FATAL] Fatal error: {e!r}")
        log(f"[FATAL] Traceback:\n{traceback.format_exc()}")
        sys.exit(1)
