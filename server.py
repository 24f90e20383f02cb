"""Run the converter locally: python server.py (PORT defaults to 3000)."""
from fileconverter.server import main

if __name__ == "__main__":
    main()
