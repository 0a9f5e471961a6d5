from timedlogs.cli import main

raise SystemExit(main())
