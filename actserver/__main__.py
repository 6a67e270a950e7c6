from actserver.app import main

raise SystemExit(main())
