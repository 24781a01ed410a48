from stylecheck.cli import main

raise SystemExit(main())
