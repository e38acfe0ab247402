#!/usr/bin/env python3
"""Run the direnv action from a checkout of this repository."""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the action's own checkout is importable when run as a script
action_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(action_root))

from direnv_action.runtime.workflow import main

if __name__ == "__main__":
    sys.exit(main())
