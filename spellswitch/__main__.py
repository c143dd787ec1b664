#!/usr/bin/env python3
"""
SpellSwitch main entry point for running as a module: python3 -m spellswitch
"""

import sys
from spellswitch.cli import main

if __name__ == '__main__':
    sys.exit(main())
