from sqlalchemy import Column, Date, String, Text
from ..database import Base


class Experience(Base):
    """
    경력 사항(회사, 직책, 근무 기간)을 나타냅니다.
    여러 개의 Skill과 다대다 관계로 연결됩니다.
    """
    __tablename__ = "experience"
    id = Column(String(36), primary_key=True)
    company_name = Column(String(255), nullable=False)
    position = Column(String(255), nullable=False)
    location = Column(String(255))
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    image = Column(Text)
