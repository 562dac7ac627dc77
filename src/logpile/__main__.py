import sys

from logpile.cli import main

sys.exit(main())
