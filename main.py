"""
Entry point for the clinic services
SERVICE_NAME selects which service this process runs
"""

# Load environment variables from .env file FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

import uvicorn

from clinic.core.config import config
from clinic.core.logger import logger

SERVICE_APPS = {
    "doctor-service": "clinic.doctor.main:app",
    "patient-service": "clinic.patient.main:app",
    "schedules-service": "clinic.schedules.main:app",
}


if __name__ == "__main__":
    if config.service_name not in SERVICE_APPS:
        raise SystemExit(f"Unknown SERVICE_NAME '{config.service_name}', expected one of {sorted(SERVICE_APPS)}")

    logger.info(
        f"Starting {config.service_name} on port {config.port}",
        metadata={
            "service_name": config.service_name,
            "version": config.service_version,
            "environment": config.environment,
            "port": config.port
        }
    )

    uvicorn.run(
        SERVICE_APPS[config.service_name],
        host=config.host,
        port=config.port,
        reload=config.environment == "development"
    )
