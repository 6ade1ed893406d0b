import os
from typing import Dict, Optional

import uvicorn


def _truthy(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _ssl_options() -> Dict[str, Optional[str]]:
    env_to_option = {
        "SSL_CERTFILE": "ssl_certfile",
        "SSL_KEYFILE": "ssl_keyfile",
        "SSL_CA_CERTS": "ssl_ca_certs",
        "SSL_KEYFILE_PASSWORD": "ssl_keyfile_password",
    }
    return {
        option: os.environ[name]
        for name, option in env_to_option.items()
        if os.getenv(name)
    }


def main() -> None:
    uvicorn.run(
        "assetdb.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=_truthy(os.getenv("RELOAD", "false")),
        log_level=os.getenv("LOG_LEVEL", "info"),
        proxy_headers=True,
        forwarded_allow_ips=os.getenv("FORWARDED_ALLOW_IPS", "*"),
        **_ssl_options(),
    )


if __name__ == "__main__":
    main()
