import sys

from degviz.cli import main

sys.exit(main())
