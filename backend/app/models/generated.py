from sqlalchemy import Column, ForeignKey, Integer, Text, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class ServiceCategories(Base):
    __tablename__ = 'service_categories'

    name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    description = Column(Text)
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    service_posts = relationship('ServicePosts', back_populates='category')
    bookings = relationship('Bookings', back_populates='category')


class ServicePoints(Base):
    __tablename__ = 'service_points'

    name = Column(Text, nullable=False)
    city = Column(Text, nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    work_schedule = Column(Text, nullable=False, server_default=text("'{}'"))
    id = Column(Integer, primary_key=True)
    partner_id = Column(Integer)
    address = Column(Text)
    notes = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    service_posts = relationship('ServicePosts', back_populates='service_point', order_by='ServicePosts.post_number')
    bookings = relationship('Bookings', back_populates='service_point')
    seasonal_schedules = relationship('SeasonalSchedules', back_populates='service_point')


class ServicePosts(Base):
    __tablename__ = 'service_posts'

    service_point_id = Column(ForeignKey('service_points.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    post_number = Column(Integer, nullable=False, server_default=text('1'))
    slot_duration = Column(Integer, nullable=False, server_default=text('30'))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    has_custom_schedule = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)
    category_id = Column(ForeignKey('service_categories.id', ondelete='SET NULL'))
    working_days = Column(Text)  # JSON {"mon": true, ...}
    custom_hours = Column(Text)  # JSON {"start": "09:00", "end": "18:00"}
    description = Column(Text)

    service_point = relationship('ServicePoints', back_populates='service_posts')
    category = relationship('ServiceCategories', back_populates='service_posts')
    bookings = relationship('Bookings', back_populates='service_post')


class Bookings(Base):
    __tablename__ = 'bookings'

    service_point_id = Column(ForeignKey('service_points.id'), nullable=False)
    client_id = Column(Integer, nullable=False)
    booking_date = Column(Text, nullable=False)  # YYYY-MM-DD
    start_time = Column(Text, nullable=False)    # HH:MM
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    id = Column(Integer, primary_key=True)
    service_post_id = Column(ForeignKey('service_posts.id', ondelete='SET NULL'))
    category_id = Column(ForeignKey('service_categories.id', ondelete='SET NULL'))
    end_time = Column(Text)
    notes = Column(Text)
    cancel_reason = Column(Text)

    service_point = relationship('ServicePoints', back_populates='bookings')
    service_post = relationship('ServicePosts', back_populates='bookings')
    category = relationship('ServiceCategories', back_populates='bookings')


class SeasonalSchedules(Base):
    __tablename__ = 'seasonal_schedules'

    service_point_id = Column(ForeignKey('service_points.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    start_date = Column(Text, nullable=False)  # YYYY-MM-DD, inclusive
    end_date = Column(Text, nullable=False)    # YYYY-MM-DD, inclusive
    working_hours = Column(Text, nullable=False, server_default=text("'{}'"))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    priority = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    id = Column(Integer, primary_key=True)
    description = Column(Text)

    service_point = relationship('ServicePoints', back_populates='seasonal_schedules')
