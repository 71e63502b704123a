"""Tests for the ReservationPurchaseMethod tag classifier."""

import pytest
from hypothesis import given, strategies as st

from aws_reservations.core.exceptions import ConfigurationError, UnknownPurchaseMethodError
from aws_reservations.core.purchase_method import (
    PURCHASE_METHOD_TAG,
    EC2PurchaseMethod,
    RDSPurchaseMethod,
    classify_ec2_purchase_method,
    classify_rds_purchase_method,
    tags_from_list,
)


EC2_LITERALS = ['ComputeSavingsPlans', 'EC2InstanceSavingsPlans', 'SpotInstances', 'Needless']
RDS_LITERALS = ['ReservedInstance', 'Needless']


class TestEC2Classifier:

    @pytest.mark.parametrize('value', EC2_LITERALS)
    def test_known_values(self, value):
        method = classify_ec2_purchase_method({PURCHASE_METHOD_TAG: value, 'Name': 'web'})
        assert method == EC2PurchaseMethod(value)
        assert method.value == value

    def test_missing_tag_is_undefined(self):
        assert classify_ec2_purchase_method({'Name': 'web'}) == EC2PurchaseMethod.UNDEFINED
        assert classify_ec2_purchase_method({}) == EC2PurchaseMethod.UNDEFINED

    @pytest.mark.parametrize('value', ['ReservedInstance', 'computesavingsplans', '', 'Undefined'])
    def test_unknown_value_is_fatal(self, value):
        with pytest.raises(UnknownPurchaseMethodError) as exc_info:
            classify_ec2_purchase_method({PURCHASE_METHOD_TAG: value})
        assert exc_info.value.value == value
        assert isinstance(exc_info.value, ConfigurationError)

    def test_only_exact_key_is_considered(self):
        tags = {'reservationpurchasemethod': 'Needless', 'ReservationPurchaseMethod ': 'Needless'}
        assert classify_ec2_purchase_method(tags) == EC2PurchaseMethod.UNDEFINED


class TestRDSClassifier:

    @pytest.mark.parametrize('value', RDS_LITERALS)
    def test_known_values(self, value):
        assert classify_rds_purchase_method({PURCHASE_METHOD_TAG: value}) == RDSPurchaseMethod(value)

    def test_missing_tag_is_undefined(self):
        assert classify_rds_purchase_method({}) == RDSPurchaseMethod.UNDEFINED

    @pytest.mark.parametrize('value', ['ComputeSavingsPlans', 'SpotInstances', 'Reserved'])
    def test_ec2_only_values_are_fatal(self, value):
        with pytest.raises(UnknownPurchaseMethodError):
            classify_rds_purchase_method({PURCHASE_METHOD_TAG: value})

    @given(value=st.text(max_size=30).filter(lambda v: v not in RDS_LITERALS))
    def test_any_other_value_is_fatal(self, value):
        with pytest.raises(UnknownPurchaseMethodError):
            classify_rds_purchase_method({PURCHASE_METHOD_TAG: value})


class TestTagsFromList:

    def test_converts_key_value_pairs(self):
        tags = tags_from_list([
            {'Key': 'Name', 'Value': 'web'},
            {'Key': PURCHASE_METHOD_TAG, 'Value': 'Needless'},
        ])
        assert tags == {'Name': 'web', PURCHASE_METHOD_TAG: 'Needless'}

    def test_none_is_empty(self):
        assert tags_from_list(None) == {}
