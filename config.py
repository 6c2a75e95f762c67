"""Configuration module for the billing core."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Backend API
    API_BASE_URL = os.getenv('API_BASE_URL', 'https://invoice-swift-backend-production.up.railway.app')
    API_TOKEN = os.getenv('API_TOKEN')
    API_TIMEOUT = float(os.getenv('API_TIMEOUT', '10'))  # seconds
    STREAM_CONNECT_TIMEOUT = float(os.getenv('STREAM_CONNECT_TIMEOUT', '10'))

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Display
    CURRENCY_CODE = os.getenv('CURRENCY_CODE', 'INR')

    # Default document dates (days from today)
    INVOICE_DUE_DAYS = int(os.getenv('INVOICE_DUE_DAYS', '30'))
    QUOTE_VALID_DAYS = int(os.getenv('QUOTE_VALID_DAYS', '30'))
    CHALLAN_DELIVERY_DAYS = int(os.getenv('CHALLAN_DELIVERY_DAYS', '1'))

    # Analytics
    ANALYTICS_DEFAULT_RANGE = os.getenv('ANALYTICS_DEFAULT_RANGE', '30')


class TestingConfig(Config):
    """Configuration used by the test suite."""

    API_BASE_URL = 'http://backend.test'
    API_TOKEN = 'test-token'
    API_TIMEOUT = 1
    STREAM_CONNECT_TIMEOUT = 1
    LOG_LEVEL = 'DEBUG'
    INVOICE_DUE_DAYS = 15
    QUOTE_VALID_DAYS = 30
    CHALLAN_DELIVERY_DAYS = 1
