from bankledger.cli import main

raise SystemExit(main())
