from stream_engine.cli import main

raise SystemExit(main())
