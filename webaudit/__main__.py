import sys

from webaudit.main import main

sys.exit(main())
