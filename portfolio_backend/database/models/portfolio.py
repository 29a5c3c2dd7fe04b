from sqlalchemy import Column, Date, String, Text
from ..database import Base


class Portfolio(Base):
    """
    포트폴리오에 게시되는 하나의 프로젝트 항목입니다.
    여러 개의 Skill과 최대 하나의 Experience에 연결될 수 있습니다.
    """
    __tablename__ = "portfolio"
    id = Column(String(36), primary_key=True)
    title = Column(String(255), nullable=False)
    subtitle = Column(String(255))
    image = Column(Text)
    content = Column(Text)
    status = Column(String(64))
    date_project = Column(Date)
