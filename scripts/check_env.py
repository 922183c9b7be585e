print(">>> Starting environment check...")

import sys
import numpy as np
import pandas as pd
import scipy
import yaml
import requests
import yfinance as yf

print("Python:", sys.version)
print("numpy:", np.__version__)
print("pandas:", pd.__version__)
print("scipy:", scipy.__version__)
print("pyyaml:", yaml.__version__)
print("requests:", requests.__version__)
print("yfinance:", yf.__version__)

print(">>> Environment check passed.")
