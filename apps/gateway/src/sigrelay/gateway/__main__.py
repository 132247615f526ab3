"""网关启动入口 -- python -m sigrelay.gateway

环境变量：
  SIGRELAY_GATEWAY_HOST  监听地址（默认 127.0.0.1）
  SIGRELAY_GATEWAY_PORT  监听端口（默认 8000）
"""

import os

import uvicorn


def main() -> None:
    """启动 uvicorn"""
    host = os.environ.get("SIGRELAY_GATEWAY_HOST", "127.0.0.1")
    port = int(os.environ.get("SIGRELAY_GATEWAY_PORT", "8000"))
    # 日志由 setup_logging() 统一配置
    uvicorn.run("sigrelay.gateway.main:app", host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
