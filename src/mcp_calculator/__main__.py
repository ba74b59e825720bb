import sys

from mcp_calculator.cli import main

sys.exit(main())
