# 统一的 SQLAlchemy 声明式基类，所有 ORM 模型共享同一个 metadata，便于建表与测试清表。

from sqlalchemy.orm import declarative_base

Base = declarative_base()
