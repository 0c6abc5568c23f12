import sys

from mmcp.cli import main

sys.exit(main())
