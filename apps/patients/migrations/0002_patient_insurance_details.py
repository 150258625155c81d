from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('patients', '0001_initial'),
        ('insurance', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='patient',
            name='insurance_details',
            field=models.ManyToManyField(
                blank=True,
                help_text='Insurance policies this patient is enrolled in',
                related_name='insured_patients',
                through='insurance.PolicyEnrollment',
                to='insurance.insurancepolicy'
            ),
        ),
    ]
