"""SQLAlchemy models for the tables the utilization analytics read."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Employee(Base):
    """Employee with role information (v_employees view)."""
    
    __tablename__ = "v_employees"
    
    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=False)
    code = Column(String(50), nullable=True)
    role_code = Column(String(50), nullable=True)  # technician, technician_l1, technician_l2, ...
    role_name = Column(String(200), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    
    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, name='{self.name}', role='{self.role_code}')>"


class WorkType(Base):
    """Ticket work type reference data."""
    
    __tablename__ = "ref_ticket_work_types"
    
    id = Column(String(36), primary_key=True)
    code = Column(String(50), nullable=False)
    name = Column(String(200), nullable=True)
    
    def __repr__(self) -> str:
        return f"<WorkType(id={self.id}, code='{self.code}')>"


class Province(Base):
    """Province reference data."""
    
    __tablename__ = "ref_provinces"
    
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(200), nullable=False)
    
    def __repr__(self) -> str:
        return f"<Province(id={self.id}, name='{self.name}')>"


class Site(Base):
    """Customer site where ticket work is performed."""
    
    __tablename__ = "main_sites"
    
    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=True)
    province_code = Column(Integer, nullable=True)
    
    def __repr__(self) -> str:
        return f"<Site(id={self.id}, province={self.province_code})>"


class Appointment(Base):
    """Appointment scheduling a ticket on a given date."""
    
    __tablename__ = "main_appointments"
    
    id = Column(String(36), primary_key=True)
    appointment_date = Column(Date, nullable=True)
    appointment_type = Column(String(50), nullable=True)  # e.g. full_day, half_morning, call_to_schedule
    
    def __repr__(self) -> str:
        return f"<Appointment(id={self.id}, date={self.appointment_date}, type={self.appointment_type})>"


class Ticket(Base):
    """Service ticket with its work type, appointment and site."""
    
    __tablename__ = "main_tickets"
    
    id = Column(String(36), primary_key=True)
    work_type_id = Column(String(36), ForeignKey("ref_ticket_work_types.id"), nullable=True)
    appointment_id = Column(String(36), ForeignKey("main_appointments.id"), nullable=True)
    site_id = Column(String(36), ForeignKey("main_sites.id"), nullable=True)
    
    # Relationships
    work_type = relationship("WorkType")
    appointment = relationship("Appointment")
    site = relationship("Site")
    
    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, work_type={self.work_type_id})>"


class TicketEmployee(Base):
    """Technician assigned to a ticket on a date."""
    
    __tablename__ = "jct_ticket_employees"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(String(36), ForeignKey("main_tickets.id"), nullable=False)
    employee_id = Column(String(36), ForeignKey("v_employees.id"), nullable=True)
    date = Column(Date, nullable=False)
    is_key_employee = Column(Boolean, nullable=False, default=False)
    
    # Relationships
    ticket = relationship("Ticket")
    employee = relationship("Employee")
    
    def __repr__(self) -> str:
        return f"<TicketEmployee(ticket={self.ticket_id}, emp={self.employee_id}, date={self.date})>"


class TicketEmployeeConfirmed(Base):
    """Technician confirmed on a ticket on a date."""
    
    __tablename__ = "jct_ticket_employees_cf"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(String(36), ForeignKey("main_tickets.id"), nullable=False)
    employee_id = Column(String(36), ForeignKey("v_employees.id"), nullable=True)
    date = Column(Date, nullable=False)
    is_key_employee = Column(Boolean, nullable=False, default=False)
    
    # Relationships
    ticket = relationship("Ticket")
    employee = relationship("Employee")
    
    def __repr__(self) -> str:
        return f"<TicketEmployeeConfirmed(ticket={self.ticket_id}, emp={self.employee_id}, date={self.date})>"
