import sys

from spec_assistant.cli import main

sys.exit(main())
