import sys

from pastel.main import main

sys.exit(main())
