from fileshare.cli import main

raise SystemExit(main())
