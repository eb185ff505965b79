from __future__ import annotations

import sys

from prime_stream.main import main

sys.exit(main())
