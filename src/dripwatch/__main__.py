from __future__ import annotations

import sys

from dripwatch.app import main

sys.exit(main())
