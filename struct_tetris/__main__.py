import sys

from struct_tetris.cli import main

sys.exit(main())
