import sys

from site_bucket.main import main

sys.exit(main())
