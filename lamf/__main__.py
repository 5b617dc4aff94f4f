import sys

from lamf.main import main


sys.exit(main())
