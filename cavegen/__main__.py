import sys

from cavegen.main import main

sys.exit(main())
