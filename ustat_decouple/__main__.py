import sys

from ustat_decouple.run import main

sys.exit(main())
