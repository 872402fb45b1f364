"""电商后端：用户/商品 CRUD + 基于签名 token 的鉴权。"""

__version__ = "0.1.0"
