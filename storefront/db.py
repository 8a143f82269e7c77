from django.utils import timezone

from .errors import RequestValidationError


def partial_update(model, pk, changes, allowed_fields):
    """按白名单对单行做部分更新

    只有出现在 allowed_fields 中且值不为 None 的字段会被写入，
    所有字段在一条 UPDATE 语句里完成。返回受影响的行数。
    """
    fields = {
        name: value
        for name, value in changes.items()
        if name in allowed_fields and value is not None
    }
    if not fields:
        raise RequestValidationError('fields', 'No fields to update')

    if any(f.name == 'updated_at' for f in model._meta.concrete_fields):
        fields['updated_at'] = timezone.now()

    return model.objects.filter(pk=pk).update(**fields)
