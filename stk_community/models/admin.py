from sqlalchemy import Column, String
from stk_community.database import Base


class Admin(Base):
    __tablename__ = "admins"

    username = Column(String, primary_key=True, index=True)
    # bcrypt hash; legacy plaintext rows are re-hashed at startup
    password = Column(String, nullable=False)
