from code_to_docx.cli import main

raise SystemExit(main())
