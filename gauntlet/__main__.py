from gauntlet.main import main

raise SystemExit(main())
