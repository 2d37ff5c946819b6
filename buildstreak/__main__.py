"""Entry point for buildstreak: python -m buildstreak"""

from buildstreak.buildstreak import main

if __name__ == "__main__":
    main()
