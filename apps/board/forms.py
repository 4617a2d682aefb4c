# apps/board/forms.py

from django import forms

from apps.core.models import Task


class TaskUpdateForm(forms.Form):
    """
    Partial task update (PATCH)

    Only keys present in the payload are applied; ``column_id`` alone is a
    board move. ``index`` asks the server to rank the task at that slot of
    the destination column, ``position`` sets the rank verbatim.
    """

    title = forms.CharField(max_length=500, required=False)
    description = forms.CharField(required=False)
    status = forms.ChoiceField(choices=Task.STATUS_CHOICES, required=False)
    priority = forms.ChoiceField(choices=Task.PRIORITY_CHOICES, required=False)
    assignee_id = forms.IntegerField(required=False)
    column_id = forms.IntegerField(required=False)
    due_date = forms.DateField(required=False)
    estimate = forms.IntegerField(min_value=0, required=False)
    position = forms.FloatField(required=False)
    index = forms.IntegerField(min_value=0, required=False)

    def __init__(self, data, *args, **kwargs):
        super().__init__(data, *args, **kwargs)
        self.provided = set(data or ())

    def clean_title(self):
        title = self.cleaned_data.get('title')
        if 'title' in self.provided and not (title or '').strip():
            raise forms.ValidationError("Title cannot be empty")
        return title.strip() if title else title

    def clean(self):
        cleaned = super().clean()
        if 'position' in self.provided and 'index' in self.provided:
            raise forms.ValidationError("Send either position or index, not both")
        if 'column_id' in self.provided and cleaned.get('column_id') is None:
            raise forms.ValidationError("column_id cannot be null")
        return cleaned

    def changes(self):
        """Cleaned values for the keys the caller actually sent"""
        return {key: self.cleaned_data.get(key) for key in self.fields if key in self.provided}


class TaskCreateForm(forms.Form):
    """Quick add from a board column"""

    title = forms.CharField(max_length=500)
    description = forms.CharField(required=False)
    column_id = forms.IntegerField(required=False)
    parent_id = forms.IntegerField(required=False)
    status = forms.ChoiceField(choices=Task.STATUS_CHOICES, required=False)
    priority = forms.ChoiceField(choices=Task.PRIORITY_CHOICES, required=False)
    assignee_id = forms.IntegerField(required=False)
    due_date = forms.DateField(required=False)
    estimate = forms.IntegerField(min_value=0, required=False)

    def clean_title(self):
        title = self.cleaned_data['title'].strip()
        if not title:
            raise forms.ValidationError("Title cannot be empty")
        return title
