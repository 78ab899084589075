"""Allow ``python -m bib_browser``."""

from __future__ import annotations

import sys

from bib_browser.app import main

sys.exit(main())
