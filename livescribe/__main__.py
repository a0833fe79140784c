import sys

from livescribe.cli import main

sys.exit(main())
