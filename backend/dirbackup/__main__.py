from dirbackup.main import main

raise SystemExit(main())
