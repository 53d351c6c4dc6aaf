# stk_community/models/institution.py
from datetime import datetime
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from stk_community.database import Base


class Institution(Base):
    """
    A Studienkolleg / preparation program listed on the site.
    Has at most one detail row with the application-process metadata.
    """
    __tablename__ = "universities"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(String, nullable=False, default="")
    type = Column(String, nullable=False, default="")
    image_url = Column(String, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # unloaded detail rows are removed by the store (ON DELETE CASCADE)
    detail = relationship(
        "InstitutionDetail",
        back_populates="institution",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class InstitutionDetail(Base):
    __tablename__ = "university_details"

    university_id = Column(
        String, ForeignKey("universities.id", ondelete="CASCADE"), primary_key=True
    )
    institution = relationship("Institution", back_populates="detail")

    address = Column(String, nullable=True)
    email = Column(String, nullable=True)
    website_url = Column(String, nullable=True)
    bundesland = Column(String, nullable=True)               # federal state
    kurse = Column(String, nullable=True)                    # T, W, M, G, S ...
    application_method = Column(String, nullable=True)
    application_deadline = Column(String, nullable=True)     # "WS, SS"
    application_test_date = Column(String, nullable=True)    # "WS, SS"
    language_requirements = Column(String, nullable=True)    # B1 | B2
    status = Column(String, nullable=True)


# Lookup tables present in the schema but not read by any screen yet.
class RequiredDocument(Base):
    __tablename__ = "required_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    document_name = Column(String, nullable=False)
    university_id = Column(String, ForeignKey("universities.id", ondelete="CASCADE"), nullable=True)


class TestRequirement(Base):
    __tablename__ = "test_requirements"
    __test__ = False  # keep pytest from collecting it

    id = Column(Integer, primary_key=True, autoincrement=True)
    test_name = Column(String, nullable=False)
    university_id = Column(String, ForeignKey("universities.id", ondelete="CASCADE"), nullable=True)
