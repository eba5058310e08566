import sys

from .dactyl import main

sys.exit(main())
