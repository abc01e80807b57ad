import sys

from wikidata_extract.cli import main

if __name__ == '__main__':
    sys.exit(main())
