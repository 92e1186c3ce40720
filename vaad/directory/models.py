"""
directory/models.py
───────────────────
The class contact list.

Child       – a child enrolled in a SchoolClass.
Parent      – a parent/guardian contact (name + phone).
ChildParent – links a child to up to two parents ("parent1" / "parent2").
Staff       – teacher or assistant of the class.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone


class Child(models.Model):
    school_class = models.ForeignKey(
        'classes.SchoolClass',
        on_delete=models.CASCADE,
        related_name='children',
    )
    name = models.CharField(max_length=200)
    address = models.CharField(max_length=300, blank=True, null=True)
    birthday = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = 'Child'
        verbose_name_plural = 'Children'

    def __str__(self):
        return self.name


class Parent(models.Model):
    """
    A parent contact.  `user` is the committee admin who typed the record in
    (or the parent's own account); rows coming from the public intake form
    carry `school_class` instead.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='parent_records',
    )
    school_class = models.ForeignKey(
        'classes.SchoolClass',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='parents',
    )
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = 'Parent'
        verbose_name_plural = 'Parents'

    def __str__(self):
        return f"{self.name} ({self.phone})" if self.phone else self.name


class ChildParent(models.Model):

    class Relationship(models.TextChoices):
        PARENT1 = 'parent1', 'Parent 1'
        PARENT2 = 'parent2', 'Parent 2'

    child = models.ForeignKey(
        Child,
        on_delete=models.CASCADE,
        related_name='parent_links',
    )
    parent = models.ForeignKey(
        Parent,
        on_delete=models.CASCADE,
        related_name='child_links',
    )
    relationship = models.CharField(
        max_length=20,
        choices=Relationship.choices,
        default=Relationship.PARENT1,
    )

    class Meta:
        ordering = ['relationship']
        verbose_name = 'Child–Parent Link'
        verbose_name_plural = 'Child–Parent Links'

    def __str__(self):
        return f"{self.child} ← {self.parent} ({self.relationship})"


class Staff(models.Model):

    class Role(models.TextChoices):
        TEACHER   = 'teacher',   'Teacher'
        ASSISTANT = 'assistant', 'Assistant'

    school_class = models.ForeignKey(
        'classes.SchoolClass',
        on_delete=models.CASCADE,
        related_name='staff',
    )
    name = models.CharField(max_length=200)
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.TEACHER,
    )
    birthday = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['role', 'name']
        verbose_name = 'Staff Member'
        verbose_name_plural = 'Staff'

    def __str__(self):
        return f"{self.name} ({self.get_role_display()})"
