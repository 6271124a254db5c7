#!/usr/bin/env python3
"""
生成 JWT 簽名密鑰 (512 bits, base64)，輸出後寫入 JWT_SECRET 環境變量或密鑰管理系統。
不要把生成的密鑰提交到倉庫。
"""

import os
import sys

# 添加當前目錄到 Python 路徑
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from auth.keys import generate_secret_key


def main():
    print("Generated JWT Secret Key (use in production):")
    print(generate_secret_key())


if __name__ == "__main__":
    main()
