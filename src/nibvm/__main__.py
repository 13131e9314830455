import sys

from nibvm.cli import main

sys.exit(main())
