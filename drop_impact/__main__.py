import sys

from drop_impact.main import main

sys.exit(main())
