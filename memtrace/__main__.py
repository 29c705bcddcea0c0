"""Allow ``python -m memtrace``."""

from memtrace.main import main

raise SystemExit(main())
