import sys

from tockbot.main import main

sys.exit(main())
