import sys

from lcs_png_diff.cli import main

sys.exit(main())
