# Utility modules for the seed wallet
from utils.config import WalletConfig, load_config, get_env_var
from utils.status_updates import StatusCallback, create_status_callback, report_status
from utils.web3_connection import get_web3_connection
