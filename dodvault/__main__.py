from dodvault.cli.main import main

raise SystemExit(main())
