from rollpurge.main import main

raise SystemExit(main())
