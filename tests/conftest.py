import sys
from pathlib import Path

# shared fakes live beside the tests
sys.path.insert(0, str(Path(__file__).parent))
